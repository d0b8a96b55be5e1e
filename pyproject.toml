[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "joyav"
version = "0.1.0"
description = "Audio/video stream primitives: packets, codec data, ADTS AAC files, FLV tags, H.264 NAL units and AMF0"
requires-python = ">=3.10"
dependencies = []
keywords = ["flv", "aac", "adts", "h264", "nalu", "amf0", "muxer", "demuxer"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Conversion",
    "Topic :: Multimedia :: Sound/Audio",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["joyav"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
