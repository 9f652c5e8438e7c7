#!/usr/bin/env python3
"""
Script de verificación para el P1-MQTT Bridge.
Verifica que todas las dependencias estén instaladas, que la configuración sea
válida y que el puerto serie P1 exista.
"""

import sys
from pathlib import Path

def check_python_version():
    """Verificar versión de Python."""
    print("🐍 Verificando versión de Python...")
    version = sys.version_info
    if version.major < 3 or (version.major == 3 and version.minor < 10):
        print(f"   ❌ Python {version.major}.{version.minor} detectado")
        print(f"   ⚠️  Se requiere Python 3.10 o superior")
        return False
    print(f"   ✅ Python {version.major}.{version.minor}.{version.micro}")
    return True

def check_dependencies():
    """Verificar dependencias instaladas."""
    print("\n📦 Verificando dependencias...")

    dependencies = {
        'aiomqtt': 'Cliente MQTT',
        'pydantic': 'Validación de configuración',
        'pydantic_settings': 'Settings con Pydantic',
        'serial': 'Puerto serie (pyserial)',
    }

    all_ok = True
    for module, description in dependencies.items():
        try:
            __import__(module)
            print(f"   ✅ {description} ({module})")
        except ImportError:
            print(f"   ❌ {description} ({module}) - NO INSTALADO")
            all_ok = False

    return all_ok

def check_config_file():
    """Verificar archivo de configuración."""
    print("\n⚙️  Verificando configuración...")

    env_file = Path(".env")
    env_example = Path(".env.example")

    if not env_example.exists():
        print("   ❌ .env.example no encontrado")
        return False
    print("   ✅ .env.example encontrado")

    if not env_file.exists():
        print("   ⚠️  .env no encontrado")
        print("   💡 Ejecuta: cp .env.example .env")
        return False
    print("   ✅ .env encontrado")

    return True

def check_app_structure():
    """Verificar estructura de la aplicación."""
    print("\n📁 Verificando estructura de la aplicación...")

    required_files = [
        "p1_bridge/__init__.py",
        "p1_bridge/config.py",
        "p1_bridge/crc16.py",
        "p1_bridge/decoder.py",
        "p1_bridge/serial_source.py",
        "p1_bridge/mqtt_transport.py",
        "p1_bridge/controller.py",
        "p1_bridge/main.py",
    ]

    all_ok = True
    for file_path in required_files:
        path = Path(file_path)
        if path.exists():
            print(f"   ✅ {file_path}")
        else:
            print(f"   ❌ {file_path} - NO ENCONTRADO")
            all_ok = False

    return all_ok

def try_import_config():
    """Intentar importar y validar la configuración."""
    print("\n🔧 Validando configuración...")

    try:
        from p1_bridge.config import settings
        print(f"   ✅ Configuración cargada")
        print(f"   📍 P1: {settings.SERIAL_PORT} @ {settings.SERIAL_BAUDRATE} "
              f"{settings.SERIAL_BYTESIZE}{settings.SERIAL_PARITY}{settings.SERIAL_STOPBITS}")
        print(f"   📍 MQTT: {settings.MQTT_HOST}:{settings.MQTT_PORT}")
        print(f"   📍 Topic: {settings.topic}")
        return True
    except Exception as e:
        print(f"   ❌ Error al cargar configuración: {e}")
        return False

def check_serial_port():
    """Verificar que el puerto serie P1 exista."""
    print("\n📡 Verificando puerto serie P1...")

    try:
        from serial.tools import list_ports
        from p1_bridge.config import settings
    except ImportError as e:
        print(f"   ❌ No se puede verificar: {e}")
        return False

    ports = [port.device for port in list_ports.comports()]
    if settings.SERIAL_PORT in ports or Path(settings.SERIAL_PORT).exists():
        print(f"   ✅ {settings.SERIAL_PORT} encontrado")
        return True

    print(f"   ❌ {settings.SERIAL_PORT} no encontrado")
    if ports:
        print(f"   💡 Puertos disponibles: {', '.join(ports)}")
    return False

def main():
    """Función principal."""
    print("=" * 60)
    print("P1-MQTT Bridge - Verificación de Sistema")
    print("=" * 60)
    print()

    checks = [
        ("Python", check_python_version),
        ("Dependencias", check_dependencies),
        ("Configuración", check_config_file),
        ("Estructura", check_app_structure),
        ("Config Import", try_import_config),
        ("Puerto P1", check_serial_port),
    ]

    results = {}
    for name, check_func in checks:
        try:
            results[name] = check_func()
        except Exception as e:
            print(f"\n   ❌ Error inesperado en {name}: {e}")
            results[name] = False

    print("\n" + "=" * 60)
    print("Resumen")
    print("=" * 60)

    for name, result in results.items():
        status = "✅ PASS" if result else "❌ FAIL"
        print(f"{status:12} {name}")

    all_pass = all(results.values())

    print("\n" + "=" * 60)
    if all_pass:
        print("🎉 ¡Todo listo! El sistema está correctamente configurado.")
        print("\nPara probar la lectura del medidor:")
        print("  p1-reader --port /dev/ttyUSB0")
        print("\nPara arrancar el bridge:")
        print("  python -m p1_bridge.main")
        return 0
    else:
        print("⚠️  Se encontraron problemas. Por favor corrige los errores.")
        print("\nPara instalar dependencias:")
        print("  pip install -e .")
        print("\nPara configurar:")
        print("  cp .env.example .env")
        return 1

if __name__ == "__main__":
    sys.exit(main())
