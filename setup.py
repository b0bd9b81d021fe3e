from setuptools import setup, find_packages

setup(
    name="pydaptivebeamforming",
    packages=find_packages(
        include=["pydaptivebeamforming", "pydaptivebeamforming.*"]),
    version='0.1.0',
    description="Frequency-domain adaptive beamforming (Generalized Sidelobe Canceller) with per-bin RLS.",
    keywords=["Adaptive", "Beamforming", "Microphone", "Array", "GSC", "RLS"],
    python_requires=">=3.8",
    install_requires=[
        'numpy',
    ],
    extras_require={
        'plot': ['matplotlib'],
        'test': ['pytest', 'scipy', 'matplotlib'],
    },

    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'Topic :: Multimedia :: Sound/Audio :: Analysis',
        'Programming Language :: Python :: 3'
    ]

)
