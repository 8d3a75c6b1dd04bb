from hvz import db, bcrypt
from hvz.services.types import Faction, GamePhase, PoiKind
from flask_login import UserMixin
from sqlalchemy.orm import declared_attr


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(50), nullable=False)
    description = db.Column(db.String(300), nullable=True)
    begin_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)
    phase = db.Column(db.String(16), nullable=False, default=GamePhase.CREATED.value) # created, registration, active, ended, cancelled
    admin_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)

    admin = db.relationship('User')
    players = db.relationship('Player', back_populates='game', cascade='all, delete-orphan')
    maps = db.relationship('Map', back_populates='game', cascade='all, delete-orphan')
    squads = db.relationship('Squad', back_populates='game', cascade='all, delete-orphan')
    infections = db.relationship('Infection', back_populates='game', cascade='all, delete-orphan')

    @property
    def game_phase(self) -> GamePhase:
        return GamePhase(self.phase)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'begin_time': _iso(self.begin_time),
            'end_time': _iso(self.end_time),
            'phase': self.phase,
            'admin_id': self.admin_id,
            'player_count': len(self.players),
            'zombie_count': sum(1 for p in self.players if p.faction == Faction.ZOMBIE),
            'map_ids': [m.id for m in self.maps],
        }


class Squad(db.Model):
    __tablename__ = 'squad'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False)
    game = db.relationship('Game', back_populates='squads')
    members = db.relationship('Player', back_populates='squad')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'game_id': self.game_id,
            'member_ids': [p.id for p in self.members],
        }


class Player(db.Model):
    __tablename__ = 'player'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'user_id', name='uq_player_game_user'),
        db.UniqueConstraint('game_id', 'bite_code', name='uq_player_game_bite_code'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    squad_id = db.Column(db.Integer, db.ForeignKey('squad.id', ondelete='SET NULL'), nullable=True)
    faction = db.Column(db.String(16), nullable=False, default=Faction.HUMAN.value)
    is_patient_zero = db.Column(db.Boolean, default=False, nullable=False)
    latitude = db.Column(db.Float, nullable=False, default=0.0)
    longitude = db.Column(db.Float, nullable=False, default=0.0)
    # Cleared once consumed by an infection
    bite_code = db.Column(db.String(64), nullable=True)

    game = db.relationship('Game', back_populates='players')
    user = db.relationship('User')
    squad = db.relationship('Squad', back_populates='members')
    infections = db.relationship('Infection', back_populates='victim', cascade='all, delete-orphan')

    def to_dict(self, include_bite_code=False):
        data = {
            'id': self.id,
            'game_id': self.game_id,
            'user_id': self.user_id,
            'squad_id': self.squad_id,
            'faction': self.faction,
            'is_patient_zero': self.is_patient_zero,
            'latitude': self.latitude,
            'longitude': self.longitude,
        }
        if include_bite_code:
            data['bite_code'] = self.bite_code
        return data


class Infection(db.Model):
    """A human turned zombie. The biter is not recorded."""
    __tablename__ = 'infection'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False)
    victim_id = db.Column(db.Integer, db.ForeignKey('player.id', ondelete='CASCADE'), nullable=False)
    occurred_at = db.Column(db.DateTime, nullable=False)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)

    game = db.relationship('Game', back_populates='infections')
    victim = db.relationship('Player', back_populates='infections')

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'victim_id': self.victim_id,
            'occurred_at': _iso(self.occurred_at),
            'latitude': self.latitude,
            'longitude': self.longitude,
        }


class Map(db.Model):
    __tablename__ = 'map'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    description = db.Column(db.String(300), nullable=True)
    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    radius = db.Column(db.Integer, nullable=False)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False)

    game = db.relationship('Game', back_populates='maps')
    supplies = db.relationship('Supply', back_populates='map', cascade='all, delete-orphan', order_by='Supply.id')
    safezones = db.relationship('Safezone', back_populates='map', cascade='all, delete-orphan', order_by='Safezone.id')
    missions = db.relationship('Mission', back_populates='map', cascade='all, delete-orphan', order_by='Mission.id')

    def points_of_interest(self, kind=None):
        groups = {
            PoiKind.SUPPLY: self.supplies,
            PoiKind.SAFEZONE: self.safezones,
            PoiKind.MISSION: self.missions,
        }
        if kind is not None:
            return list(groups[PoiKind(kind)])
        return [poi for group in groups.values() for poi in group]

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'radius': self.radius,
            'game_id': self.game_id,
        }


class PointOfInterest:
    """Columns shared by supplies, safezones and missions."""
    kind = None

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(20), nullable=False)
    description = db.Column(db.String(300), nullable=True)
    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    radius = db.Column(db.Integer, nullable=False)
    human_visible = db.Column(db.Boolean, nullable=False, default=False)
    zombie_visible = db.Column(db.Boolean, nullable=False, default=False)
    begin_time = db.Column(db.DateTime, nullable=True)
    end_time = db.Column(db.DateTime, nullable=False)

    @declared_attr
    def map_id(cls):
        return db.Column(db.Integer, db.ForeignKey('map.id'), nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'kind': self.kind.value,
            'map_id': self.map_id,
            'title': self.title,
            'description': self.description,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'radius': self.radius,
            'human_visible': self.human_visible,
            'zombie_visible': self.zombie_visible,
            'begin_time': _iso(self.begin_time),
            'end_time': _iso(self.end_time),
        }


class Supply(PointOfInterest, db.Model):
    __tablename__ = 'supply'
    kind = PoiKind.SUPPLY
    drop_kind = db.Column(db.String(16), nullable=False) # grenade, nerf_gun, ammo
    amount = db.Column(db.Integer, nullable=False, default=0)
    map = db.relationship('Map', back_populates='supplies')

    def to_dict(self):
        data = super().to_dict()
        data['drop_kind'] = self.drop_kind
        data['amount'] = self.amount
        return data


class Safezone(PointOfInterest, db.Model):
    __tablename__ = 'safezone'
    kind = PoiKind.SAFEZONE
    map = db.relationship('Map', back_populates='safezones')


class Mission(PointOfInterest, db.Model):
    __tablename__ = 'mission'
    kind = PoiKind.MISSION
    map = db.relationship('Map', back_populates='missions')


POI_MODELS = {
    PoiKind.SUPPLY: Supply,
    PoiKind.SAFEZONE: Safezone,
    PoiKind.MISSION: Mission,
}
