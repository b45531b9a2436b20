"""The picture processing unit: registers, video memory, sprites and rendering."""