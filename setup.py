from setuptools import setup, find_packages

setup(
    name="game_stat",
    version="0.1.0",
    description="Stats whose modifiers live exactly as long as their handles",
    packages=find_packages(include=["game_stat", "game_stat.*"]),
    python_requires=">=3.8",
    install_requires=[
        "PySide6",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
)
