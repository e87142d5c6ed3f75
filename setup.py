from setuptools import find_packages, setup

package_name = "rtslam_core"

setup(
    name=package_name,
    version="0.0.1",
    packages=find_packages(exclude=["test"]),
    data_files=[
        (
            "share/" + package_name + "/config",
            [
                "config/rtslam_core_base.yaml",
            ],
        ),
        (
            "share/" + package_name + "/config/presets",
            [
                "config/presets/two_sensors.yaml",
            ],
        ),
    ],
    python_requires=">=3.10",
    install_requires=["setuptools", "numpy", "scipy", "PyYAML", "pydantic>=2"],
    extras_require={"test": ["pytest"]},
    zip_safe=True,
    maintainer="you",
    maintainer_email="you@example.com",
    description="EKF-SLAM state buffer, remote Gaussians and quaternion frame composition",
    license="Apache-2.0",
)
