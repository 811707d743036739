from setuptools import setup, find_packages
from pathlib import Path

setup(
    name="text_annotator",
    version=Path("./text_annotator/VERSION").read_text().strip(),
    packages=find_packages(include=["text_annotator", "text_annotator.*"]),
    package_data={"text_annotator": ["VERSION"]},
    python_requires=">=3.8",
    install_requires=["easydict"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["text_annotator = text_annotator.cli:main"],
    },
)
