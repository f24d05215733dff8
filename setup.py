from setuptools import find_packages, setup

setup(
    name="malreader",
    version="0.1.0",
    description="Reader for mal, a Clojure-flavoured Lisp: source text to forms",
    python_requires=">=3.9",
    packages=find_packages(include=["malreader", "malreader.*"]),
    entry_points={
        "console_scripts": [
            "malread=malreader.cli:main",
        ],
    },
)
