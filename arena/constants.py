"""
Arena-wide constants for the engagement leaderboard bot.

This module contains the point tables and UI values used throughout
the codebase so the scoring rules live in one auditable place.
"""

class PointConstants:
    """Point values awarded per category."""
    
    # Attendance
    ATTENDANCE = 1
    EARLY_BIRD = 1
    REMOTE_MULTIPLIER = 2  # Remote players earn double attendance points
    STREAK_BONUS = 1       # Per two consecutive weekly check-ins
    ATTENDANCE_CHAMPION = 10
    STREAK_GAP_DAYS = 7
    
    # Presentations, keyed by (is_solo, presentation_order)
    PRESENTATION_POINTS = {
        (True, 1): 30,
        (True, 2): 20,
        (False, 1): 20,
        (False, 2): 15,
    }
    
    # Blogs
    FIRST_BLOG = 30
    SUBSEQUENT_BLOG = 20
    
    # Activities
    ACTIVITY_ATTENDANCE = 10
    ACTIVITY_TOP_PERFORMER = 20
    DOUBLE_POINTS_MULTIPLIER = 2
    
    # Courses: floor(hours * completion% * 4), zero below the threshold
    COURSE_POINTS_PER_HOUR = 4
    COURSE_MIN_COMPLETION = 60
    
    # Books
    PAGES_PER_BOOK_UNIT = 10
    DEFAULT_POINTS_PER_10_PAGES = 1
    
    # Ideas
    IDEA_MIN = 5
    IDEA_MAX = 30

class CategoryConstants:
    """Leaderboard categories and their display labels."""
    
    CATEGORIES = (
        'attendance',
        'activity',
        'course',
        'book',
        'blog',
        'presentation',
        'idea',
        'penalty',
        'bonus',
    )
    
    LABELS = {
        'attendance': 'Attendance',
        'activity': 'Activities',
        'course': 'Courses',
        'book': 'Books',
        'blog': 'Blogs',
        'presentation': 'Presentations',
        'idea': 'Ideas',
        'penalty': 'Penalties',
        'bonus': 'Bonuses',
    }
    
    ACTIVITY_TYPES = {
        'padel': 'Padel',
        'trivia_game': 'Trivia Game',
        'escape_room': 'Escape Room',
        'fifa_cup': 'FIFA Cup',
        'strategy_game': 'Strategy Game',
        'trip_bowling': 'Trip/Bowling',
    }
    
    PENALTY_REASONS = ('absences', 'vacation_compliance', 'other')
    BOOK_CATEGORIES = ('software', 'management', 'business', 'soft_skills')
    IDEA_TYPES = ('idea', 'tool')
    AWARD_KINDS = ('top_performer', 'streak', 'champion')

class PaginationConstants:
    """Constants for paginated displays."""
    
    DEFAULT_PAGE_SIZE = 10

class UIConstants:
    """Constants for Discord UI elements."""
    
    # Embed colors
    DEFAULT_EMBED_COLOR = 0x3498db  # Blue
    GOLD_RANK_COLOR = 0xffd700     # Gold for the leader
    
    # Emoji for UI elements
    LAST_PLACE_EMOJI = "🥄"  # El Kooz, cosmetic last place marker
    TROPHY_EMOJI = "🏆"
    FIRE_EMOJI = "🔥"
    CROWN_EMOJI = "👑"
