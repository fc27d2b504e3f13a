"""Unix-style text and file tools, a shell parser, a heap model, a file-system image builder and virtio layouts."""

__version__ = "0.1.0"