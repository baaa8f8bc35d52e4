"""
Rule and heuristic constants for the dominoes engine.

Rule constants (foot size, penalties, streak length) define variant
behavior. Heuristic weights only tune AI move ordering and never affect
legality or scoring.
"""


# =============================================================================
# Rule Constants
# =============================================================================

# Tiles that must be played on a double before a chicken foot is complete
CHICKEN_FOOT_SIZE = 3

# Points awarded to the player who completes a chicken foot
CHICKEN_FOOT_BONUS = 5

# Penalty added per loser still holding the double blank (Chicken Foot)
DOUBLE_BLANK_PENALTY = 50

# Consecutive round wins needed for a Six-Love
SIX_LOVE_STREAK = 6

# Streak length at which a team is considered "on a streak"
SIX_LOVE_HOT_STREAK = 3

# Per-move and round scores in the fives family are multiples of this
SCORING_MULTIPLE = 5

# Fixed team seating for partnership variants
TEAM_SEATS: tuple[tuple[int, ...], tuple[int, ...]] = ((0, 2), (1, 3))


# =============================================================================
# AI Heuristic Weights
# =============================================================================

# Number of top-scored moves the baseline AI picks from
TOP_MOVE_WINDOW = 3

# Block / Cuban
BLOCK_DOMINO_BONUS = 50
BLOCK_DOUBLE_BONUS = 10
BLOCK_BLOCKING_BONUS = 15

# All Fives
FIVES_DOUBLE_BONUS = 5

# Chicken Foot
CHICKEN_DOUBLE_BONUS = 20
CHICKEN_FOOT_TILE_BONUS = 10
CHICKEN_FOOT_FINISH_BONUS = 15
CHICKEN_DOMINO_BONUS = 100

# Cutthroat
CUTTHROAT_DOMINO_BONUS = 100
CUTTHROAT_DOUBLE_BONUS = 15
CUTTHROAT_BLOCKING_BONUS = 20

# Partner / Six-Love
PARTNER_DOMINO_BONUS = 75
PARTNER_SUPPORT_BONUS = 25
PARTNER_SUPPORT_HAND_SIZE = 2
PARTNER_DOUBLE_BONUS = 10
PARTNER_BLOCKING_BONUS = 15
SIX_LOVE_STREAK_WEIGHT = 5
SIX_LOVE_STREAK_BONUS = 20
SIX_LOVE_STREAK_BONUS_AT = 4

# Cross
CROSS_DOMINO_BONUS = 100
CROSS_DOUBLE_BONUS = 15
CROSS_OPEN_END_WEIGHT = 5

# Draw
DRAW_DOMINO_BONUS = 100
DRAW_DOUBLE_BONUS = 10
DRAW_HAND_SIZE_WEIGHT = 5
DRAW_LOW_BONEYARD_BONUS = 20
DRAW_LOW_BONEYARD = 5


# =============================================================================
# Personality Layer
# =============================================================================

# Endgame starts when fewer than this many tiles remain across all hands
ENDGAME_TILE_THRESHOLD = 10

# Multiplier applied to defensiveness-weighted blocking potential
BLOCKING_WEIGHT = 50

# Extra weight per pip for shedding heavy tiles late in a round
ENDGAME_PIP_WEIGHT = 2
ENDGAME_DOMINO_BONUS = 30
