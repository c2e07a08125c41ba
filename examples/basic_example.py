"""Basic example: plan and render an orientation-corrected resize.

Builds a landscape JPEG tagged "rotated 90 CW" in memory, then shows
what each stage of imgfit decides for it.
"""

import io

from PIL import Image

from imgfit import FitRequest, read_orientation
from imgfit.pipeline import resize_plan_sync, resize_sync


def make_tagged_jpeg(orientation: int = 6) -> bytes:
    """Create a 400x300 JPEG carrying an EXIF orientation tag."""
    img = Image.new("RGB", (400, 300), (30, 90, 160))
    exif = Image.Exif()
    exif[0x0112] = orientation
    buf = io.BytesIO()
    img.save(buf, "JPEG", exif=exif.tobytes())
    return buf.getvalue()


def main() -> None:
    """Run the basic example."""
    print("=" * 60)
    print("imgfit - Basic Example")
    print("=" * 60)

    data = make_tagged_jpeg()
    request = FitRequest(200, 200)

    # Example 1: Orientation straight from the bytes
    print("\n1. Orientation:")
    orientation = read_orientation(data)
    print(f"   Code: {orientation.code} ({orientation.describe()})")

    # Example 2: Geometry and transform plans
    print("\n2. Plan:")
    plan = resize_plan_sync(data, "image/jpeg", request)
    print(f"   Geometry:  {plan.geometry}")
    print(f"   Transform: {plan.transform}")

    # Example 3: Render to PNG bytes
    print("\n3. Render:")
    out = resize_sync(data, "image/jpeg", request, output_format="png")
    rendered = Image.open(io.BytesIO(out.data))
    print(f"   {out.mime_type}, {len(out.data)} bytes, {rendered.size[0]}x{rendered.size[1]}")

    print("\n" + "=" * 60)
    print("Example completed!")
    print("=" * 60)


if __name__ == "__main__":
    main()
