from setuptools import setup

setup(
    name='modeldedup',
    version='0.1.0',
    packages=['modeldedup'],
    license='GPLv3',
    description='Structural deduplication of baked model graphs.',
    python_requires='>=3.7',
    install_requires=['numpy', 'tqdm'],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'modeldedup = modeldedup.__main__:main'
        ]
    }
)
