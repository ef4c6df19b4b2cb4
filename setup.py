from setuptools import setup, find_packages

setup(
    name="ycsb-elasticsearch",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "elasticsearch>=8.0.0,<9",
        "prometheus-client>=0.15.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    python_requires=">=3.8",
    description="Elasticsearch binding for YCSB-style benchmark harnesses",
)
