"""Core: configuración, dominio, errores y orquestación del build."""
