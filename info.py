"""
info.py
=======

svcrotate package information for use by setup.py and packaging utilities.
"""

import importlib.util
import os


# -----------------------------------------------------------------------------
# This should be the only line that has to change when reusing info.py for new
# modules/packages.
name = 'svcrotate'
# -----------------------------------------------------------------------------


# Load the package's __init__.py on its own, without importing the rest of the
# package, so the metadata can be read before the dependencies are installed.
path = os.path.join(os.path.abspath(os.path.dirname(__file__)), name)
if os.path.isdir(path):
    import_path = os.path.join(path, '__init__.py')
else:
    path += '.py'
    import_path = path
spec = importlib.util.spec_from_file_location(name + '_info', import_path)
module = importlib.util.module_from_spec(spec)
spec.loader.exec_module(module)


# Extract the info from the module/package
info = {
    'name': name,
    'version': module.__version__,
    'author': module.__author__,
    'author_email': module.__author_email__,
    'description': module.__description__,
    'long_description': module.__long_description__,
    'license': module.__license__,
    'url': module.__url__,
    'install_requires': module.__install_requires__,
    'packages': module.__packages__,
    'package_data': module.__package_data__,
    'entry_points': module.__entry_points__,
    'python_requires': module.__python_requires__,
}
