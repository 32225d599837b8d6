"""Batch processing example: extract and match every image in a folder."""

import cv2
from pathlib import Path
from sfmfront import FeaturePipeline
from sfmfront.config import load_config
from sfmfront.utils.logger import setup_logger


def main():
    """Process all frames of a folder in batch."""
    config = load_config()
    logger = setup_logger('sfmfront', config['logging']['level'], config['logging']['log_file'])

    frames_dir = Path("test_data/frames")
    frame_files = sorted(frames_dir.glob("*.jpg"))
    logger.info(f"Loading {len(frame_files)} frames...")

    images = []
    for frame_path in frame_files:
        image = cv2.imread(str(frame_path))
        if image is None:
            logger.warning(f"Could not load {frame_path}")
            continue
        images.append(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))

    pipeline = FeaturePipeline(config)
    feature_sets = pipeline.extract_all(images)
    results = pipeline.match_pairs(feature_sets)

    for (i, j), result in sorted(results.items()):
        logger.info(f"Images {feature_sets[i].image_index} <-> {feature_sets[j].image_index}: "
                    f"{result.num_inliers} inliers")

    pipeline.log_summary()


if __name__ == "__main__":
    main()
