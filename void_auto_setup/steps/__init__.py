from .step_10_enable_repos import EnableReposStep
from .step_20_core_services import AudioBluetoothStep, CoreServicesStep, DevToolsStep
from .step_30_extras import FontsStep, VibeToolStep
from .step_40_gpu_drivers import GpuDriversStep
from .step_50_desktop import DesktopStep, HyprlandStep, LoginManagerStep, SessionBaseStep
from .step_60_user_apps import FileManagerStep, LauncherStep, SampleWallpaperStep, WallpaperManagerStep
from .step_70_user_session import AutostartStep, SessionFilesStep, UserGroupsStep
from .step_80_system_apps import BrowserStep, FlatpakStep, GamingStep
from .step_90_final_notes import FinalNotesStep

__all__ = [
    "EnableReposStep",
    "CoreServicesStep",
    "AudioBluetoothStep",
    "DevToolsStep",
    "FontsStep",
    "VibeToolStep",
    "GpuDriversStep",
    "SessionBaseStep",
    "DesktopStep",
    "HyprlandStep",
    "LoginManagerStep",
    "LauncherStep",
    "FileManagerStep",
    "WallpaperManagerStep",
    "SampleWallpaperStep",
    "UserGroupsStep",
    "AutostartStep",
    "SessionFilesStep",
    "BrowserStep",
    "FlatpakStep",
    "GamingStep",
    "FinalNotesStep",
]
