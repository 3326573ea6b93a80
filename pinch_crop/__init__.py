"""Pan/zoom image cropper: map a fixed crop window back onto the source image."""
