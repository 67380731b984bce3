"""安装脚本"""

from setuptools import find_packages, setup

setup(
    name="kanikoplugin",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=[
        "docker>=7.0.0",
        "typer>=0.9.0",
        "rich>=13.4.2",
        "python-dotenv>=1.0.0",
        "loguru>=0.7.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "kaniko-plugin=kanikoplugin.cli:main",
            "kaniko-docker=kanikoplugin.cli:docker_main",
            "kaniko-ecr=kanikoplugin.cli:ecr_main",
            "kaniko-gcr=kanikoplugin.cli:gcr_main",
        ],
    },
    python_requires=">=3.8",
    description="kaniko 镜像构建插件，支持 Docker Hub、ECR、GCR 仓库",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    keywords="docker, kaniko, ci, drone, container, registry",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Topic :: Software Development :: Build Tools",
        "Topic :: Utilities",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
)
