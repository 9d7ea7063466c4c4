"""
Chart Configuration Module

This module contains all configurable settings for chart generation including:
- Canvas size and resolution
- Region layout (title band, summary table band, chart margins)
- Color theme for grid, candles, volume and summary table
- Font sizes
"""

from typing import Dict, Any, Tuple

RGB = Tuple[int, int, int]


class ChartConfig:
    """
    Configuration class for chart rendering settings.
    Colors are stored as 8-bit RGB tuples; use ChartConfig.to_mpl() for matplotlib.
    """

    # Canvas in pixels; figure size is derived from dpi
    CANVAS = {
        'width': 1280,
        'height': 960,
        'dpi': 100,
    }

    LAYOUT = {
        'title_height': 40,             # Dedicated band for the title
        'table_height': 100,            # Summary table band below the title
        'table_margin_fraction': 0.15,  # Table inset on each side
        'chart_margin': 10,             # Top/left/right margin around the chart
        'chart_margin_bottom': 20,
        'label_area_left': 0,           # Price labels live on the right
        'label_area_right': 80,
        'label_area_bottom': 40,
    }

    THEME = {
        'background': (255, 255, 255),
        'text_color': (0, 0, 0),
        'axis_color': (150, 150, 150),

        # Grid
        'grid_major': (235, 235, 235),
        'grid_minor': (240, 240, 240),
        'grid_vertical': (245, 245, 245),
        'grid_linewidth': 1.0,

        # Candles
        'wick_color': (70, 70, 70),
        'default_candle': (0, 0, 0),
        'default_volume': (130, 130, 130),
        'parse_fallback': (128, 128, 128),
        'volume_alpha': 0.8,

        # Last candle direction (reference line and summary table)
        'direction_up': (0, 150, 0),
        'direction_down': (180, 0, 0),
        'price_linewidth': 1.0,

        # Summary table
        'table_cell_bg': (220, 220, 220),
        'table_cell_padding': 5,
        'table_bottom_padding': 6,
        'table_row_spacing': 0.15,      # Fraction of row height left as gap
    }

    FONTS = {
        'family': 'sans-serif',
        'title': 24,
        'x_labels': 12,
        'y_labels': 15,
        'table': 14,
        'marker': 12,
        'marker_min': 8,
    }

    @classmethod
    def get_canvas(cls) -> Dict[str, Any]:
        """Get canvas size configuration"""
        return cls.CANVAS.copy()

    @classmethod
    def get_layout(cls) -> Dict[str, Any]:
        """Get region layout configuration"""
        return cls.LAYOUT.copy()

    @classmethod
    def get_theme_colors(cls) -> Dict[str, Any]:
        """
        Get current theme colors.

        Returns:
            Dictionary containing all theme color settings
        """
        return cls.THEME.copy()

    @classmethod
    def get_fonts(cls) -> Dict[str, Any]:
        """Get font size configuration"""
        return cls.FONTS.copy()

    @staticmethod
    def to_mpl(rgb: RGB, alpha: float = 1.0) -> Tuple[float, float, float, float]:
        """Convert an 8-bit RGB tuple into a matplotlib RGBA tuple"""
        r, g, b = rgb
        return (r / 255.0, g / 255.0, b / 255.0, alpha)
