from setuptools import setup, find_namespace_packages

CORE_DEPS = [
    "yt-dlp",
    "requests",
    "python-dotenv",
    "colorama",
]

TEST_DEPS = [
    "pytest",
]

setup(
    name="mediagrab",
    version="0.1.0",
    packages=find_namespace_packages(include=["mediagrab", "mediagrab.*"]),
    python_requires=">=3.8",
    install_requires=CORE_DEPS,
    extras_require={
        "test": TEST_DEPS,
    },
    entry_points={
        "console_scripts": [
            "mediagrab=mediagrab.main:main",
        ],
    },
)
