from setuptools import find_packages, setup

setup(
    name="pyvariate",
    version="0.1.0",
    description="Alias-method discrete sampling and Wishart random matrices.",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.7",
    install_requires=["numpy", "scipy"],
    extras_require={"test": ["pytest"]},
)
