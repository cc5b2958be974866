"""
盤上ゲームのルールエンジン（チェッカー型・チェス型）のセットアップスクリプト
"""

from setuptools import setup, find_packages

setup(
    name="boardrules",
    version="1.0.0",
    description="チェッカー型・チェス型ゲームのルールエンジン",
    author="",
    packages=find_packages(include=["src", "src.*"]),
    package_dir={"": "."},
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.118.0",
        "uvicorn>=0.37.0",
        "pydantic>=2.11.10",
        "python-multipart>=0.0.6",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "hypothesis>=6.0.0",
            "httpx>=0.24.0",
        ],
    },
)
