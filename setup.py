from setuptools import setup, find_namespace_packages
from os import path

requires = [
    # click has been known to publish non-backwards compatible minors in the past
    "click>=8.0,<9",
    "colorlog~=6.4",
    "pydantic>=2,<3",
    "tornado~=6.0",
]


# read the contents of your README file
this_directory = path.abspath(path.dirname(__file__))
with open(path.join(this_directory, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

version = "1.0.0"

setup(
    version=version,
    python_requires=">=3.12",  # also update classifiers
    # Meta data
    name="formresource-core",
    description="Asynchronous loading of form resources and their parent resources",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Inmanta",
    author_email="code@inmanta.com",
    license="Apache Software License 2",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="forms submissions resources asyncio",
    # Packaging
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src"),
    zip_safe=False,
    include_package_data=True,
    install_requires=requires,
    extras_require={
        "test": ["pytest", "pytest-asyncio>=0.23"],
    },
    entry_points={
        "console_scripts": [
            "formresource = formresource.app:main",
        ],
    },
)
