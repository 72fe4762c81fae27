from setuptools import setup, find_packages

setup(
    name="ichol",
    version="0.1",
    description="Left-looking incomplete Cholesky preconditioner for sparse SPD matrices",
    long_description_content_type="text/markdown",
    author="Sean P. Engelstad",
    author_email="sengeltad312@gatech.edu",
    install_requires=["numpy", "scipy", "numba"],
    extras_require={"test": ["pytest"]},
    packages=find_packages(include=["ichol*"]),
)
