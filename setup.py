from setuptools import find_packages, setup

setup(
    name="nodeflow",
    version="1.0.0",
    packages=find_packages(include=["nodeflow", "nodeflow.*"]),
    install_requires=[line for line in open("requirements-core.txt").read().splitlines() if line],
    extras_require={
        "test": ["pytest>=7.0", "httpx>=0.27"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "nodeflow=nodeflow.cli:main",
            "echo-json=nodeflow.actions.echo:main",
            "writefile-json=nodeflow.actions.writefile:main",
            "httprequest=nodeflow.actions.httprequest:main",
            "claude-api=nodeflow.actions.claude:main",
        ],
    },
)
