### Bitmap exception classes ###
class BitmapError(Exception):
    """Base class for bitmap codec and transform errors."""
    pass


class NotFoundError(BitmapError, FileNotFoundError):
    """Source or sink could not be opened."""
    def __init__(self, target, message=""):
        self.target = target
        self.message = message or f"Cannot open bitmap: {target}"
        super().__init__(self.message)

    def __str__(self):
        return self.message


class InvalidFormatError(BitmapError, ValueError):
    """Raised when the file is not an uncompressed 24-bit bitmap."""
    def __init__(self, message, field=None, value=None):
        self.field = field
        self.value = value
        self.message = message
        super().__init__(message)


class OutOfMemoryError(BitmapError, MemoryError):
    """Pixel buffer could not be allocated"""
    def __init__(self, width, height, message=""):
        self.width = width
        self.height = height
        self.message = message or f"Cannot allocate {width}x{height} pixel buffer"
        super().__init__(self.message)


class WriteError(BitmapError, OSError):
    """Writing the encoded bitmap failed"""
    def __init__(self, target, message=""):
        self.target = target
        self.message = message or f"Error writing bitmap: {target}"
        super().__init__(self.message)

    def __str__(self):
        return self.message


class InvalidImageError(BitmapError, ValueError):
    """Image is missing or has been released"""
    pass
