"""Image upload backend: validate, store on Cloudinary or local disk, list."""
