from setuptools import setup, find_packages

setup(
    name="forumwatch",
    version="0.1",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "aiohttp",
        "beautifulsoup4",
        "soupsieve",
        "orjson",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "forumwatch=forumwatch.cli:main",
        ],
    },
    python_requires=">=3.8",
)
