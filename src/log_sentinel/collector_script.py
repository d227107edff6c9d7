"""PowerShell collection script offered for download from the dashboard.

The script runs on the investigated machine and writes ``forensics_data.json``
in the export-object shape that :func:`log_sentinel.ingestion.parse_dataset`
accepts. It is shipped as text only and never executed here.
"""

from __future__ import annotations

from pathlib import Path

SCRIPT_FILENAME = "collect_data.ps1"

COLLECTOR_SCRIPT = r"""
# LogSentinel - Forensic Collector Script
# Run this in PowerShell to generate 'forensics_data.json'
# Then upload the JSON file to the dashboard.

$ErrorActionPreference = "SilentlyContinue"
Write-Host "Starting Forensic Collection..." -ForegroundColor Cyan

$data = @{
    logs = @()
    artifacts = @()
}

# 1. Recent documents (LNK files in the Recent folder)
Write-Host "[-] Scanning Recent Documents..."
$recentPath = "$env:APPDATA\Microsoft\Windows\Recent"
if (Test-Path $recentPath) {
    $recentFiles = Get-ChildItem $recentPath -File | Select-Object -First 50
    foreach ($item in $recentFiles) {
        $data.artifacts += @{
            id = [Guid]::NewGuid().ToString()
            timestamp = $item.LastAccessTime.ToString("o")
            type = "RECENT_DOC"
            name = $item.Name
            path = $item.FullName
            action = "File Accessed (LNK)"
            riskLevel = "UNKNOWN"
        }
    }
}

# 2. USB devices currently present
Write-Host "[-] Scanning USB Devices..."
$usbDevices = Get-PnpDevice -Class 'USB' -Status OK | Where-Object { $_.FriendlyName -notmatch 'Hub|Controller|Composite' }
foreach ($dev in $usbDevices) {
    $data.artifacts += @{
        id = [Guid]::NewGuid().ToString()
        timestamp = (Get-Date).ToString("o")
        type = "USB_DEVICE"
        name = $dev.FriendlyName
        path = $dev.InstanceId
        action = "Device Present"
        riskLevel = "UNKNOWN"
    }
}

# 3. Folder access on common user folders
Write-Host "[-] Scanning User Activity..."
$commonPaths = @("Desktop", "Downloads", "Documents", "Pictures")
foreach ($folder in $commonPaths) {
    $path = "$env:USERPROFILE\$folder"
    if (Test-Path $path) {
        $item = Get-Item $path
        $data.artifacts += @{
            id = [Guid]::NewGuid().ToString()
            timestamp = $item.LastAccessTime.ToString("o")
            type = "SHELLBAG"
            name = $folder
            path = $path
            action = "Folder Access/Mod"
            riskLevel = "LOW"
        }
    }
}

$outFile = "forensics_data.json"
$data | ConvertTo-Json -Depth 4 | Out-File $outFile -Encoding utf8
Write-Host "[+] Collection Complete! Upload '$outFile' to LogSentinel." -ForegroundColor Green
Start-Sleep -Seconds 2
""".lstrip()


def write_collector_script(directory: Path) -> Path:
    """Write the script into ``directory`` and return its path."""
    target = Path(directory) / SCRIPT_FILENAME
    target.write_text(COLLECTOR_SCRIPT, encoding="utf-8")
    return target
