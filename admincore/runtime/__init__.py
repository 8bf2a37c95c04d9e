"""Application registry and tenant-scoped cache, queue and locker wrappers."""