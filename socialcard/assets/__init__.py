from socialcard.assets.resolver import ImageBatch, ImageCache, ImageResolver, ImageResult, collect_image_urls

__all__ = ["ImageBatch", "ImageCache", "ImageResolver", "ImageResult", "collect_image_urls"]
