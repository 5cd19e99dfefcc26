# zenith_tracker/storage/__init__.py
from importlib import import_module


def get_storage(config):
    """Instantiate the backend named by ``config['storage']['backend']``."""
    storage_cfg = config.get('storage', {})
    name = storage_cfg.get('backend', 'json')
    try:
        path = config['storage_backends'][name]
    except KeyError:
        raise ValueError(f"Unknown storage backend '{name}'.") from None
    module_name, cls_name = path.rsplit('.', 1)
    mod = import_module(module_name)
    return getattr(mod, cls_name).from_config(storage_cfg)
