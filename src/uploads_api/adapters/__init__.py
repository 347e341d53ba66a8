"""
Adapter layer for the Uploads API.

Contains the storage backends (local disk and Cloudinary) the upload pipeline
persists images to.
"""
