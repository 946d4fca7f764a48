from setuptools import find_packages, setup

setup(
    name='walletbridge',
    version='0.1.0',
    description='Command execution and transaction encoding for hardware signing devices',
    author='isantolin',
    author_email='',
    python_requires='>=3.11',
    packages=find_packages(include=['walletbridge', 'walletbridge.*']),
    install_requires=[
        'msgspec',
        'construct',
        'transitions',
        'marshmallow',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio',
        ],
    },
    entry_points={
        'console_scripts': [
            'walletbridge-txdebug=walletbridge.tools.tx_debug:main',
        ],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: POSIX :: Linux',
    ],
)
