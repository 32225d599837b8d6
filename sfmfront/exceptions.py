"""Exceptions raised by the correspondence front end."""


class SfmFrontError(Exception):
    """Base class for recoverable per-image or per-pair failures."""


class UnsupportedInputError(SfmFrontError, ValueError):
    """Image buffer is not an 8-bit array with 3 or 4 channels."""


class InsufficientCorrespondencesError(SfmFrontError):
    """Too few candidate correspondences to fit a homography."""

    def __init__(self, count: int, required: int = 4):
        super().__init__(
            f"Insufficient correspondences: got {count}, need at least {required}"
        )
        self.count = count
        self.required = required


class HomographyEstimationError(SfmFrontError):
    """RANSAC did not produce a usable homography."""


class DescriptorMismatchError(SfmFrontError, ValueError):
    """Descriptor sets cannot be compared under the selected metric."""


class InvalidFeatureSetError(SfmFrontError, ValueError):
    """Keypoints, descriptors and colors of a feature set are not aligned."""
