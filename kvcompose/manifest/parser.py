"""YAML configuration parser."""
import yaml

from .schema import ModuleConfiguration

class ConfigurationParser:
    """Parser for YAML key vault module configurations."""
    
    @staticmethod
    def load(file_path: str) -> ModuleConfiguration:
        """Load and validate a YAML configuration file.
        
        Args:
            file_path: Path to the YAML configuration file.
            
        Returns:
            ModuleConfiguration: Validated configuration object.
            
        Raises:
            FileNotFoundError: If the configuration file doesn't exist.
            ValidationError: If the configuration is invalid.
            yaml.YAMLError: If the YAML is malformed.
        """
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
        return ModuleConfiguration.load(data)
