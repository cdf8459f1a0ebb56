from setuptools import setup

def readme():
    with open('README.md') as f:
        return f.read()

setup(
    name='planes',
    version='0.1.0',
    description='Max-Sum Task Allocation Simulator for Fleets of Planes',
    long_description=readme(),
    long_description_content_type='text/markdown',
    packages=['planes'],
    scripts=[],
    python_requires='>=3.8',
    install_requires=['matplotlib', 'numpy', 'pandas', 'tqdm'],
    extras_require={'test' : ['pytest']},
    entry_points={'console_scripts' : ['planes=planes.cli:main']}
)
