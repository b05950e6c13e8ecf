from .settings_handler import QuerySettingsHandler
from .settings_dict import ODataQuerySettingsDict
