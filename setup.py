from setuptools import find_packages, setup

setup(
    name="prthread",
    version="0.1.0",
    description="Mirror Azure DevOps pull-request lifecycle events into Slack threads",
    packages=find_packages(include=["prthread", "prthread.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "fastapi",
        "uvicorn",
        "pydantic>=2",
        "PyYAML",
        "slack_sdk>=3.9",
        "python-dotenv",
    ],
    extras_require={"test": ["pytest", "httpx"]},
    entry_points={"console_scripts": ["prthread = prthread.cli:main"]},
)
