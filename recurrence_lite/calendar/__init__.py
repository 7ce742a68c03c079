"""Event models and the occurrence expansion stages."""
