from setuptools import setup

from vaultcommander import __version__

install_requires = [
    'asciitree',
    'colorama',
    'cryptography>=39.0.1',
    'prompt_toolkit',
    'pycryptodomex>=3.20.0',
    'pyperclip',
    'tabulate',
]

if __name__ == '__main__':
    setup(
        name='vaultcommander',
        version=__version__,
        description='Path-addressed encrypted credential vault synchronized over git',
        python_requires='>=3.8',
        packages=['vaultcommander', 'vaultcommander.commands'],
        install_requires=install_requires,
        extras_require={'test': ['pytest']},
        entry_points={
            'console_scripts': [
                'vault-commander=vaultcommander.__main__:main',
            ],
        },
    )
