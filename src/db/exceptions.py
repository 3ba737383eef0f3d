class DatabaseNotInitializedError(RuntimeError):
    """Engine запрошен до успешного DatabaseBootstrap.initialize()."""
