#!/usr/bin/env python3
"""
Setup script for Finger Counter
"""

from setuptools import setup, find_packages

setup(
    name="finger-counter",
    version="0.1.0",
    description="Finger counting and static hand gesture recognition on MediaPipe hand landmarks",
    packages=find_packages(include=["finger_counter", "finger_counter.*"]),
    package_data={"finger_counter": ["config.default.yaml"]},
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "opencv-python",
        "PyYAML",
    ],
    extras_require={
        "tracking": ["mediapipe>=0.10"],
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "finger-counter=finger_counter.main:main",
        ],
    },
)
