import os
from datetime import time
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Arena bot configuration settings"""
    
    # Discord settings
    DISCORD_TOKEN = os.getenv('DISCORD_TOKEN')
    DISCORD_GUILD_ID = int(os.getenv('DISCORD_GUILD_ID', 0))
    DISCORD_GUILD_IDS = os.getenv('DISCORD_GUILD_IDS', '')  # Comma-separated for multi-guild support
    OWNER_DISCORD_ID = int(os.getenv('OWNER_DISCORD_ID', 0))
    
    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///arena.db')
    
    # Bot settings
    COMMAND_PREFIX = os.getenv('COMMAND_PREFIX', '!')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    
    # Check-in settings
    TIMEZONE = os.getenv('ARENA_TIMEZONE', 'UTC')
    CHECK_IN_WEEKDAY = int(os.getenv('CHECK_IN_WEEKDAY', 2))  # Monday=0, so 2 is Wednesday
    EARLY_BIRD_CUTOFF = os.getenv('EARLY_BIRD_CUTOFF', '11:30')
    
    # Cycle settings
    CYCLE_LENGTH_DAYS = int(os.getenv('CYCLE_LENGTH_DAYS', 181))
    
    @classmethod
    def get_guild_ids(cls):
        """Get list of guild IDs for command syncing"""
        if cls.DISCORD_GUILD_IDS:
            try:
                return [int(guild_id.strip()) for guild_id in cls.DISCORD_GUILD_IDS.split(',') if guild_id.strip()]
            except ValueError:
                raise ValueError("DISCORD_GUILD_IDS must be comma-separated integers")
        elif cls.DISCORD_GUILD_ID:
            return [cls.DISCORD_GUILD_ID]
        else:
            # Global sync
            return []
    
    @classmethod
    def get_early_bird_cutoff(cls) -> time:
        """Parse EARLY_BIRD_CUTOFF (HH:MM) into a time object"""
        try:
            hours, minutes = cls.EARLY_BIRD_CUTOFF.split(':')
            return time(int(hours), int(minutes))
        except ValueError:
            raise ValueError("EARLY_BIRD_CUTOFF must use the HH:MM format")
    
    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DISCORD_TOKEN:
            raise ValueError("DISCORD_TOKEN is required")
        if not cls.OWNER_DISCORD_ID:
            raise ValueError("OWNER_DISCORD_ID is required")
        if not 0 <= cls.CHECK_IN_WEEKDAY <= 6:
            raise ValueError("CHECK_IN_WEEKDAY must be between 0 (Monday) and 6 (Sunday)")
        cls.get_early_bird_cutoff()
