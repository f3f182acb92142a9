"""PyQt6 preview window; import ``socialcard.gui.preview`` only when a display is wanted."""
