#!/usr/bin/env python3

from setuptools import setup, find_packages
import os

directory = os.path.dirname(os.path.realpath(__file__))


if __name__ == "__main__":
    setup(
        name="scenekit",
        packages=find_packages(include=["scenekit", "scenekit.*"]),
        python_requires='>3.10.0',
        version="0.1.0",
        license="MIT",
        description="Scene editor core: project persistence and undoable editing",
        author="mirmik",
        author_email="mirmikns@yandex.ru",
        url="https://github.com/mirmik/scenekit",
        long_description=open(os.path.join(
            directory, "README.md"), "r", encoding="utf8").read(),
        long_description_content_type="text/markdown",
        keywords=["editor", "scene"],
        classifiers=[],
        include_package_data=True,
        install_requires=[
            "numpy",
            "Pillow>=9.0",
            "PyQt6>=6.4",
        ],
        extras_require={
            "test": [
                "pytest",
                "pytest-asyncio",
            ],
        },
        zip_safe=False,
    )
