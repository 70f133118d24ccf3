import dxfcodec
from dxfcodec.entities import Circle, Line


drawing = dxfcodec.Drawing(dxfcodec.CodecConfig.for_version("R12"))
drawing.add(Line(start=(0.0, 0.0, 0.0), end=(10.0, 0.0, 0.0)))
drawing.add(Circle(center=(5.0, 5.0, 0.0), radius=2.5))
drawing.saveas("/tmp/dxfcodec_r12.dxf")

loaded = dxfcodec.readfile("/tmp/dxfcodec_r12.dxf")
print(loaded.version.name, loaded.counts())

loaded.config = loaded.config.replace(acad_version_number=dxfcodec.DxfVersion.R2000)
loaded.saveas("/tmp/dxfcodec_r2000.dxf")
print(dxfcodec.readfile("/tmp/dxfcodec_r2000.dxf").version.name)
