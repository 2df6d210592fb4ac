import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="damatch",
    version="0.0.1",
    author="Dengwang Tang",
    author_email="dwtang@umich.edu",
    description="Deferred acceptance algorithm for stable matching problems",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/dwtang/damatch/",
    packages=setuptools.find_packages(exclude=["tests"]),
    install_requires=['numpy', 'scipy', 'numba'],
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
