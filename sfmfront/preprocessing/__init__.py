"""Image preprocessing ahead of detection."""

from .color_conversion import check_image, to_detection_buffer

__all__ = ['check_image', 'to_detection_buffer']
