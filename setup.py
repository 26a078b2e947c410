import os

from setuptools import setup

main_ns = {}
ver_path = os.path.join('kettle', 'version.py')
with open(ver_path) as ver_file:
    exec(ver_file.read(), main_ns)

setup(
    name='kettle',
    packages=['kettle'],
    version=main_ns['__version__'],
    license='MIT',
    description='Package to integrate the Schroedinger equation for kets, bras and propagators',
    keywords= ['science', 'physics', 'quantum dynamics', 'schroedinger equation'],
    python_requires='>=3.8',
    install_requires=[
        'numpy>=1.19',
        'scipy>=1.4',
        'typing_extensions',
        'pyyaml'
        ],
    extras_require={
        'test': ['pytest']
        },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering :: Physics',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        ]
)
