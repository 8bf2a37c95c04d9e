"""Call logging: log fields, context-scoped loggers, level mapping and interceptors."""