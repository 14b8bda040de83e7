import io

from PIL import Image

from ..base import FileTransformStage, SourceFile


# Pillow formats re-encoded losslessly with optimize=True
OPTIMIZABLE_FORMATS = {"PNG", "JPEG", "GIF"}


class ImageOptimizeStage(FileTransformStage):
    """Re-encodes raster images with Pillow's optimizer.

    Failures are logged at debug level and the original bytes are kept;
    a re-encoded image is only used when it is smaller. SVG passes through.
    """

    def __init__(self, logger=None):
        super().__init__("imagemin", logger)

    def transform(self, source_file: SourceFile) -> SourceFile:
        if source_file.suffix.lower() == ".svg":
            return source_file
        try:
            optimized = self.optimize(source_file.contents)
        except Exception as e:
            self.logger.debug(f"Skipping optimization of {source_file.relative}: {e}")
            return source_file

        if optimized is not None and len(optimized) < len(source_file.contents):
            self.logger.debug(
                f"{source_file.relative}: {len(source_file.contents)} -> {len(optimized)} bytes"
            )
            source_file.contents = optimized
        return source_file

    @staticmethod
    def optimize(data: bytes):
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
            if image_format not in OPTIMIZABLE_FORMATS:
                return None
            save_kwargs = {"optimize": True}
            if image_format == "JPEG":
                save_kwargs["quality"] = "keep"
            if image_format == "GIF" and getattr(image, "is_animated", False):
                save_kwargs["save_all"] = True
            buffer = io.BytesIO()
            image.save(buffer, format=image_format, **save_kwargs)
            return buffer.getvalue()
