#!/usr/bin/env python
# encoding: utf-8

from setuptools import setup

setup(
    name='cryptobreak',
    description='Cryptographic primitives and the attacks that break their misuse.',
    version='0.1',

    license='MIT',

    packages=['cryptobreak', 'cryptobreak.t'],
    install_requires=[
        'pycryptodome',
        'colorama'
    ],
    extras_require={
        'test': ['pytest'],
    },

    scripts=['bin/cryptobreak'],

    zip_safe=False,
    include_package_data=True,
)
