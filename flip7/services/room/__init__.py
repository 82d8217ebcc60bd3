from flip7.services.room.service import Room, RoomService, get_room_service, set_room_service

__all__ = [
    "Room",
    "RoomService",
    "get_room_service",
    "set_room_service",
]
