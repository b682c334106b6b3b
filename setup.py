import setuptools

# python setup.py sdist bdist_wheel
# twine upload dist/* && rm -rf build dist *.egg-info

setuptools.setup(
    name="oauth_bird",
    version="0.1.0",
    author="RA",
    author_email="numpde@null.net",
    keywords="python twitter oauth",
    description="OAuth 1.0a request signing and a Twitter REST API client.",
    long_description="OAuth 1.0a (RFC 5849) request signing and a Twitter REST API (v1/v1.1) client.",
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.7',
    install_requires=['python-dotenv', 'requests'],

    # Signatures are cross-checked against oauthlib in the tests
    extras_require={
        'test': ['pytest', 'requests-oauthlib'],
    },
)
