"""
CatRouter - Services Layer
==========================

What:  Upload handling that sits between the cat routes (HTTP) and the disk.

Service Inventory:
    - storage.py:        DiskStorage, filename strategies, store_upload(),
                         existence checks
    - upload_service.py: UploadConfig and UploadService (store → check → result)

Routes stay thin: they pull the file out of the request and hand it to
UploadService, which never raises for storage problems.
"""
