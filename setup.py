from setuptools import find_packages, setup


APP_NAME = "dispatch-reports"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Gerador de relatorios PDF para ordens de servico de campo"
APP_AUTHOR = "Dispatch Reports"


setup(
    name=APP_NAME,
    version=APP_VERSION,
    description=APP_DESCRIPTION,
    author=APP_AUTHOR,
    python_requires=">=3.9",
    packages=find_packages(include=["dispatch_core", "dispatch_core.*", "dispatch_reports", "dispatch_reports.*"]),
    install_requires=[
        "reportlab>=4.0",
        "Pillow>=10.0",
        "pypdf>=4.0",
        "httpx>=0.25",
        "numpy>=1.24",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
