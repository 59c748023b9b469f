"""Install the microproduct submission service."""

from setuptools import setup, find_packages

setup(
    name='microproducts',
    version='0.1.0',
    packages=find_packages(include=['microproducts', 'microproducts.*']),
    py_modules=['wsgi'],
    zip_safe=False,
    python_requires='>=3.8',
    install_requires=[
        'flask',
        'jsonschema',
        'pyyaml',
        'pytz',
        'requests',
        'retry',
        'urllib3',
    ],
    extras_require={
        'test': ['pytest'],
    },
    package_data={
        'microproducts': ['schema/resources/*.json'],
    },
    include_package_data=True
)
