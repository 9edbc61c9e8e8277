from setuptools import setup

setup (
    name="iodep",
    version="0.1",
    packages=['iodep.trace', 'iodep.analyzer'],
    install_requires=["numpy", "pandas"],
    extras_require={"test": ["pytest"]}
)
