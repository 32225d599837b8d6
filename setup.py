from setuptools import setup, find_packages

setup(
    name="sfmfront",
    version="0.1.0",
    description="Keypoint extraction and RANSAC-verified pairwise matching for structure from motion",
    author="sfmfront contributors",
    packages=find_packages(include=["sfmfront", "sfmfront.*"]),
    install_requires=[
        "opencv-python>=4.8.0",
        "numpy>=1.24.0",
        "scipy>=1.10.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.1.0",
        ],
    },
    python_requires=">=3.9",
)
