from setuptools import setup, find_packages

setup(
    name="inventory-crud",
    version="1.0.0",
    packages=find_packages(include=["inventory", "inventory.*"]),
    package_data={"inventory": ["templates/*.html"]},
    install_requires=[
        "fastapi",
        "uvicorn",
        "pydantic>=2",
        "jinja2",
        "python-multipart",
        "python-dotenv",
        "sqlalchemy>=2",
        "pymysql",
        "google-cloud-storage",
        "google-cloud-secret-manager",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    python_requires=">=3.11",
)
