"""Basic usage example: match two photos of the same scene."""

import sys

import cv2
import numpy as np
from sfmfront import FeaturePipeline, SfmFrontError
from sfmfront.utils.logger import setup_logger


def load_rgb(path: str):
    """Load an image file as an RGB array."""
    image = cv2.imread(path)
    return None if image is None else cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


def main():
    """Extract features from two images and verify their matches."""
    logger = setup_logger('basic_usage')

    if len(sys.argv) < 3:
        print("Usage: python basic_usage.py <image_a> <image_b>")
        return

    images = [load_rgb(path) for path in sys.argv[1:3]]
    if any(image is None for image in images):
        logger.error("Could not load both images")
        return

    pipeline = FeaturePipeline()
    feature_sets = pipeline.extract_all(images)
    if len(feature_sets) < 2:
        logger.warning("Not enough keypoints in one of the images")
        return

    query, train = feature_sets
    logger.info(f"Keypoints: {query.num_keypoints} / {train.num_keypoints}")

    try:
        result = pipeline.match(query, train)
    except SfmFrontError as e:
        logger.error(f"Matching failed: {e}")
        return

    logger.info(f"Inliers: {result.num_inliers}/{result.num_candidates} "
                f"({result.inlier_ratio:.1%})")
    logger.info(f"Homography:\n{np.array2string(result.homography, precision=4)}")


if __name__ == "__main__":
    main()
