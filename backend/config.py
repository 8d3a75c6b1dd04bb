import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///hvz.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Players needed before a game may go active (never below 1)
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '1'))
    # Bite code entropy in bytes (16 bytes = 128 bits)
    BITE_CODE_BYTES = int(os.environ.get('BITE_CODE_BYTES', '16'))
    # Allowed point-of-interest radius, metres
    POI_MIN_RADIUS = int(os.environ.get('POI_MIN_RADIUS', '1'))
    POI_MAX_RADIUS = int(os.environ.get('POI_MAX_RADIUS', '50'))
    # End active games automatically once their end time passes
    AUTO_END_GAMES = os.environ.get('AUTO_END_GAMES', '1') not in ('0', 'false', 'False')
    # Browser origins allowed for HTTP and Socket.IO
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173,http://localhost:4200'
        ).split(',') if o.strip()
    ]
