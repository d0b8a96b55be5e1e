"""Audio/video stream primitives: packets, codec data, ADTS AAC files, FLV tags, H.264 NAL units and AMF0."""

__version__ = "0.1.0"