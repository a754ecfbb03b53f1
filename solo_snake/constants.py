"""Game constants."""

GRID = 20
TILE_SIZE = 20
START_SNAKE = [(10, 10), (9, 10), (8, 10)]
START_DIRECTION = "right"

FOODS_PER_LEVEL = 10
BASE_SPEED = 150
SPEED_STEP = 15
MIN_SPEED = 50
POINTS_PER_FOOD = 10
COMBO_WINDOW_MS = 2000
MAX_COMBO = 5

FOOD_PLACEMENT_ATTEMPTS = 500
OBSTACLE_PLACEMENT_ATTEMPTS = 200
OBSTACLES_PER_LEVEL = (2, 3)
CLEAR_ZONE = 3

SWIPE_THRESHOLD_PX = 15
GYRO_DEAD_ZONE = 20.0
GYRO_THROTTLE_MS = 180
GYRO_WATCHDOG_MS = 1000

COMBO_DISPLAY_SECONDS = 1.5
LEVEL_FLASH_ALPHA = 0.7
LEVEL_FLASH_DECAY = 0.9  # alpha per second

DIRECTIONS = {
    "up": (0, -1),
    "down": (0, 1),
    "left": (-1, 0),
    "right": (1, 0),
}
OPPOSITES = {"up": "down", "down": "up", "left": "right", "right": "left"}

KEY_MAP = {
    "ArrowUp": "up",
    "ArrowDown": "down",
    "ArrowLeft": "left",
    "ArrowRight": "right",
    "w": "up",
    "s": "down",
    "a": "left",
    "d": "right",
}
PAUSE_KEYS = {" ", "p", "P"}

LEVEL_THEMES = [
    {"name": "Deep Sea", "snake_hue": 153, "bg": "#16213e", "border": "#0f3460", "food": "#e94560"},
    {"name": "Neon Purple", "snake_hue": 270, "bg": "#1a1025", "border": "#3d1f5c", "food": "#ff6bcb"},
    {"name": "Lava", "snake_hue": 30, "bg": "#1f1206", "border": "#5c3a0f", "food": "#ff4444"},
    {"name": "Arctic", "snake_hue": 190, "bg": "#0a1a20", "border": "#0d4f5c", "food": "#ffdd57"},
    {"name": "Crimson", "snake_hue": 340, "bg": "#200a10", "border": "#5c0f2a", "food": "#00ff88"},
    {"name": "Forest", "snake_hue": 80, "bg": "#0f1a06", "border": "#3a5c0f", "food": "#ff7744"},
    {"name": "Midnight", "snake_hue": 210, "bg": "#0a0f20", "border": "#1a3a6e", "food": "#ffa500"},
]
