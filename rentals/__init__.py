"""Motor de disponibilidad, reservas y calificaciones para alquiler de instrumentos."""
