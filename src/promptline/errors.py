class ConfigError(ValueError):
    """
    Raised for an unusable toggle file, a malformed ``NAME=BOOL`` override,
    or an unknown segment name
    """
